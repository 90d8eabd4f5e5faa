import os

import pytest

from gothicframework.routing import (
    DEFAULT_CONFIG,
    ConfigType,
    FileBasedRouteHelper,
    HttpMethod,
    Import,
    RouteConfig,
    RouteTemplate,
    TemplateInfo,
)

ROUTES_TEMPLATE = (
    "package routes\n"
    "{{if .ImportDefault}}default\n{{end}}"
    "{{range .Imports}}import {{.Package}} {{.PackagePath}}\n{{end}}"
    "{{range .Routes}}route {{.HttpPath}} {{.ConfigPackageName}}.{{.ConfigName}} "
    "{{.PackageName}}.{{.FunctionName}}\n{{end}}"
    "{{range .ApiRoutes}}api {{.HttpPath}} {{.ConfigPackageName}}.{{.ConfigName}} "
    "{{.PackageName}}.{{.FunctionName}}\n{{end}}"
)

INDEX_PAGE = (
    "package pages\n\n"
    "var IndexConfig = routes.RouteConfig[any]{\n\tType: routes.STATIC,\n}\n\n"
    "func Index() templ.Component {\n\treturn nil\n}\n"
)

LAZY_COMPONENT = (
    "package components\n\n"
    "func LazyLoad(props string) templ.Component {\n\treturn nil\n}\n"
)

HELLO_API = (
    "package api\n\n"
    "var HelloWorldConfig = routes.ApiRouteConfig{\n\tHttpMethod: routes.GET,\n}\n\n"
    "func HelloWorld(w http.ResponseWriter, r *http.Request) {\n}\n"
)


@pytest.fixture
def project(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    for folder in ("src/pages", "src/components", "src/api", "src/routes", ".gothicCli/templates"):
        (tmp_path / folder).mkdir(parents=True)
    (tmp_path / ".gothicCli/templates/autoGenRoutes.go").write_text(ROUTES_TEMPLATE)
    (tmp_path / "src/pages/index_templ.go").write_text(INDEX_PAGE)
    (tmp_path / "src/components/lazyLoad_templ.go").write_text(LAZY_COMPONENT)
    (tmp_path / "src/api/helloWorld.go").write_text(HELLO_API)
    return tmp_path


def test_static_cache_control():
    assert RouteConfig(type=ConfigType.STATIC).cache_control() == "max-age=31536000"


def test_isr_cache_control_uses_revalidate_seconds():
    config = RouteConfig(type=ConfigType.ISR, revalidate_in_sec=30)
    header = config.cache_control()
    assert header.startswith("max-age=30,")
    assert "stale-while-revalidate=30" in header
    assert "stale-if-error=30" in header


def test_dynamic_has_no_cache_control():
    assert RouteConfig(type=ConfigType.DYNAMIC, http_method=HttpMethod.POST).cache_control() is None


def test_default_config_is_static_get():
    assert DEFAULT_CONFIG.type is ConfigType.STATIC
    assert DEFAULT_CONFIG.http_method is HttpMethod.GET
    assert DEFAULT_CONFIG.middleware(None, None) is None


def test_normalize_index_page_is_root():
    helper = FileBasedRouteHelper()
    assert helper.normalize_http_path("src/pages/index_templ.go") == "/"


def test_normalize_api_route():
    helper = FileBasedRouteHelper()
    assert helper.normalize_http_path("src/api/helloWorld.go") == "/api/helloWorld"


def test_normalize_converts_params_only_for_http_routes():
    helper = FileBasedRouteHelper()
    assert helper.normalize_http_path("src/pages/blog/var_id_templ.go") == "/blog/{id}"
    api_path = helper.normalize_http_path("src/api/var_id.go")
    assert "{" not in api_path
    assert api_path.endswith("var_id")


def test_normalize_nested_index_drops_suffix():
    helper = FileBasedRouteHelper()
    nested = helper.normalize_http_path("src/pages/blog/index_templ.go")
    plain = helper.normalize_http_path("src/pages/blog_templ.go")
    assert nested == plain


def test_remove_duplicates_keeps_one_import_per_path():
    helper = FileBasedRouteHelper()
    helper.template_info = TemplateInfo(
        imports=[
            Import("pages", "mod/src/pages"),
            Import("pages", "mod/src/pages"),
            Import("api", "mod/src/api"),
        ],
        routes=[RouteTemplate(config_name="DefaultConfig")],
    )
    helper.remove_duplicates()
    paths = [imp.package_path for imp in helper.template_info.imports]
    assert sorted(paths) == ["mod/src/api", "mod/src/pages"]
    assert helper.template_info.import_default is True


def test_remove_duplicates_without_default_config():
    helper = FileBasedRouteHelper()
    helper.template_info = TemplateInfo(routes=[RouteTemplate(config_name="IndexConfig")])
    helper.remove_duplicates()
    assert helper.template_info.import_default is False


def test_render_collects_routes(project):
    helper = FileBasedRouteHelper()
    helper.render("mymod")
    info = helper.template_info

    by_function = {route.function_name: route for route in info.routes}
    assert set(by_function) == {"Index", "LazyLoad"}

    index = by_function["Index"]
    assert index.http_path == "/"
    assert index.config_name == "IndexConfig"
    assert index.config_package_name == "pages"

    lazy = by_function["LazyLoad"]
    assert lazy.http_path == "/components/lazyLoad"
    assert lazy.config_name == "DefaultApiConfig"
    assert lazy.config_package_name == "routes"

    assert len(info.api_routes) == 1
    api = info.api_routes[0]
    assert api.function_name == "HelloWorld"
    assert api.config_name == "HelloWorldConfig"
    assert api.package_name == "api"

    packages = {imp.package: imp.package_path for imp in info.imports}
    assert packages["pages"] == "mymod/src/pages"
    assert set(packages) == {"pages", "components", "api"}
    assert info.import_default is False


def test_render_writes_output_file(project):
    helper = FileBasedRouteHelper()
    helper.render("mymod")
    info = helper.template_info
    assert info.go_mod_name == "mymod"
    assert [route.function_name for route in info.api_routes] == ["HelloWorld"]
    output = (project / "src/routes/autoGenRoutes.go").read_text()
    assert output.startswith("package routes\n")
    assert "pages.IndexConfig pages.Index" in output
    assert "api.HelloWorldConfig api.HelloWorld" in output
    assert "default\n" not in output


def test_page_without_config_uses_default(project):
    (project / "src/pages/about_templ.go").write_text(
        "package pages\n\nfunc About() templ.Component {\n}\n"
    )
    helper = FileBasedRouteHelper()
    helper.render("mymod")
    about = next(r for r in helper.template_info.routes if r.function_name == "About")
    assert about.config_name == "DefaultConfig"
    assert about.config_package_name == "routes"
    assert helper.template_info.import_default is True


def test_files_without_function_are_skipped(project):
    (project / "src/components/empty_templ.go").write_text("package components\n")
    helper = FileBasedRouteHelper()
    helper.render("mymod")
    origins = [os.path.basename(r.origin_file) for r in helper.template_info.routes]
    assert "empty_templ.go" not in origins
    assert len(helper.template_info.routes) == 2


def test_render_fails_without_pages_folder(project):
    (project / "src/pages/index_templ.go").unlink()
    (project / "src/pages").rmdir()
    helper = FileBasedRouteHelper()
    with pytest.raises(OSError, match="failed to walk through pages"):
        helper.render("mymod")


def test_initialize_resets_routes_and_removes_output(project):
    output = project / "src/routes/autoGenRoutes.go"
    output.write_text("old")
    helper = FileBasedRouteHelper()
    helper.template_info.routes.append(RouteTemplate(function_name="Stale"))
    helper.template_info.import_default = True
    helper.initialize("other")
    assert helper.template_info.routes == []
    assert helper.template_info.import_default is False
    assert helper.template_info.go_mod_name == "other"
    assert not output.exists()


def test_render_twice_is_stable(project):
    helper = FileBasedRouteHelper()
    helper.render("mymod")
    first_routes = sorted(route.function_name for route in helper.template_info.routes)
    first = (project / "src/routes/autoGenRoutes.go").read_text()
    helper.render("mymod")
    second_routes = sorted(route.function_name for route in helper.template_info.routes)
    second = (project / "src/routes/autoGenRoutes.go").read_text()
    assert first_routes == ["Index", "LazyLoad"]
    assert second_routes == first_routes
    assert len(helper.template_info.api_routes) == 1
    assert first == second