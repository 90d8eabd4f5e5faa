import re
from dataclasses import replace

import pytest

from gothicframework.data import GIT_IGNORE, CliData, TailwindBinaries
from gothicframework.project import GothicCli
from gothicframework.scaffold import InitCommand, generate_app_id, validate_project_name
from gothicframework.tools import TemplHelper

SOURCE_FILES = {
    "tailwindcss-linux": b"linux-binary",
    "tailwindcss-windows.exe": b"windows-binary",
    "server/server.go": b"{{.MainServerPackageName}}\n\nfunc {{.MainServerFunctionName}} {}\n",
    ".gothicCli/templates/autoGenRoutes.go": b"package routes\n// module {{.GoModName}}\n",
    "src/pages/index.templ": b"page {{.PageName}} in {{.GoModName}}\n",
    "src/api/helloWorld.go": b"package api\n\nfunc {{.RouteName}}() {\n}\n",
    "makefile": b"css:\n\t./{{.TailWindFileName}} -i src/css/app.css\n",
    "public/favicon.ico": b"\x00\x01icon",
}


@pytest.fixture
def data_root(tmp_path):
    root = tmp_path / "data"
    for name, content in SOURCE_FILES.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
    return root


@pytest.fixture
def project(tmp_path, monkeypatch):
    folder = tmp_path / "project"
    folder.mkdir()
    monkeypatch.chdir(folder)
    return folder


def make_data(root):
    return CliData(
        template_files={".gothicCli/templates/autoGenRoutes.go": root},
        initial_files={
            "src/pages/index.templ": root,
            "src/api/helloWorld.go": root,
            "makefile": root,
        },
        public_folder_assets={"public/favicon.ico": root},
        initial_dirs=[
            "public",
            ".gothicCli",
            "src",
            ".gothicCli/templates",
            "src/api",
            "src/components",
            "src/pages",
            "src/routes",
        ],
        custom_template_based_pages={"src/pages/index.templ": "Index"},
        custom_template_based_routes={"src/api/helloWorld.go": "HelloWorld"},
        git_ignore=GIT_IGNORE,
        env='LOCAL_SERVE: "true"',
        tailwind=TailwindBinaries(mac=root, windows=root, linux=root, config=root),
        src_folder=root,
        server_folder=root,
    )


def make_cli(runtime, calls):
    def record(args, **kwargs):
        calls.append(list(args))
        return ""

    return GothicCli(runtime=runtime, templ=TemplHelper(runner=record), runner=record)


def answers(*values):
    iterator = iter(values)
    return lambda message: next(iterator)


def test_validate_project_name_accepts_kebab_case():
    assert validate_project_name("my-app-2") == "my-app-2"


@pytest.mark.parametrize("name", ["", "My-App", "my_app", "-app", "app-", "my--app"])
def test_validate_project_name_rejects_other_forms(name):
    with pytest.raises(ValueError, match="kebab case"):
        validate_project_name(name)


def test_generate_app_id_has_only_lowercase_digits_and_dashes():
    ids = [generate_app_id() for _ in range(50)]
    assert len(ids) == 50
    assert all(re.fullmatch(r"[0-9a-z-]{9}", app_id) for app_id in ids)


def test_prompt_for_project_name_takes_first_word():
    command = InitCommand(GothicCli(runtime="linux"), CliData(), prompt=answers("my-app extra"))
    assert command.prompt_for_project_name() == "my-app"


def test_prompt_for_project_name_rejects_invalid():
    command = InitCommand(GothicCli(runtime="linux"), CliData(), prompt=answers("Bad_Name"))
    with pytest.raises(ValueError, match="invalid name format"):
        command.prompt_for_project_name()


def test_prompt_for_go_mod_name_empty_raises():
    command = InitCommand(GothicCli(runtime="linux"), CliData(), prompt=answers("   "))
    with pytest.raises(ValueError, match="cannot be empty"):
        command.prompt_for_go_mod_name()


def test_prompt_for_go_mod_name_on_end_of_input_raises():
    def closed(message):
        raise EOFError

    command = InitCommand(GothicCli(runtime="linux"), CliData(), prompt=closed)
    with pytest.raises(ValueError, match="cannot be empty"):
        command.prompt_for_go_mod_name()


def test_create_new_app_writes_project(data_root, project):
    calls = []
    data = make_data(data_root)
    command = InitCommand(
        make_cli("linux", calls), data, prompt=answers("my-app", "example.com/app")
    )
    command.create_new_app(data)

    assert (project / "main.go").read_text() == "package main\n\nfunc main() {}\n"
    assert (project / "tailwindcss").read_bytes() == b"linux-binary"
    assert (project / "makefile").read_text() == "css:\n\t./tailwindcss -i src/css/app.css\n"
    assert (project / "src/pages/index.templ").read_text() == "page Index in example.com/app\n"
    assert (project / "src/api/helloWorld.go").read_text() == (
        "package api\n\nfunc HelloWorld() {\n}\n"
    )
    assert (project / "public/favicon.ico").read_bytes() == SOURCE_FILES["public/favicon.ico"]
    assert (project / ".env").read_text() == data.env
    assert (project / ".gitignore").read_text() == GIT_IGNORE
    assert re.fullmatch(r"[0-9a-z-]{9}", (project / ".gothicCli/app-id.txt").read_text())
    assert (project / "src/routes/autoGenRoutes.go").read_text() == (
        "package routes\n// module example.com/app\n"
    )
    assert calls == [
        ["go", "mod", "init", "example.com/app"],
        ["go", "mod", "tidy"],
        ["templ", "generate"],
        ["git", "init"],
    ]
    assert command.data.project_name == "my-app"
    assert data.project_name == ""


def test_create_new_app_with_invalid_name_creates_nothing(data_root, project):
    calls = []
    command = InitCommand(
        make_cli("linux", calls), make_data(data_root), prompt=answers("Not Valid", "mod")
    )
    with pytest.raises(ValueError):
        command.create_new_app()
    assert list(project.iterdir()) == []
    assert calls == []


def test_initialize_project_on_windows(data_root, project):
    cli = make_cli("windows", [])
    data = replace(make_data(data_root), project_name="demo", go_mod_name="example.com/demo")
    InitCommand(cli, data).initialize_project()

    assert (project / "tailwindcss.exe").read_bytes() == b"windows-binary"
    assert not (project / "tailwindcss").exists()
    assert (project / "makefile").read_text() == "css:\n\t./tailwindcss.exe -i src/css/app.css\n"
    info = cli.templates.init_cmd_template_info
    assert info.main_binary_file_name == "./tmp/main.exe"
    assert info.project_name == "demo"


def test_initialize_project_unknown_os(data_root, project):
    data = replace(make_data(data_root), project_name="demo", go_mod_name="example.com/demo")
    with pytest.raises(ValueError, match="unknown OS"):
        InitCommand(make_cli("plan9", []), data).initialize_project()
    assert (project / "src/pages").is_dir()


def test_missing_tailwind_binary_writes_empty_file(data_root, project):
    (data_root / "tailwindcss-linux").unlink()
    cli = make_cli("linux", [])
    data = replace(make_data(data_root), project_name="demo", go_mod_name="example.com/demo")
    InitCommand(cli, data).initialize_project()
    info = cli.templates.init_cmd_template_info
    assert info.main_binary_file_name == "./tmp/main"
    assert info.project_name == "demo"
    assert (project / "tailwindcss").read_bytes() == b""