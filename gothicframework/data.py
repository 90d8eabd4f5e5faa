"""The files and settings a new project is created from."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

DATA_ROOT = Path(__file__).resolve().parent / "resources"

ENV = 'HTTP_LISTEN_ADDR: ":8080"\nLOCAL_SERVE: "true"'

GIT_IGNORE = """.env
bin
*_templ.go*
*templ.txt
node_modules
.aws-sam
tmp
optimize/*
public/styles.css
template.yaml
samconfig.toml
Dockerfile"""


@dataclass
class TailwindBinaries:
    """Where the prebuilt Tailwind executables and its config are found."""

    mac: Path = DATA_ROOT
    windows: Path = DATA_ROOT
    linux: Path = DATA_ROOT
    config: Path = DATA_ROOT


@dataclass
class CliData:
    """Everything a new project is scaffolded from.

    Mappings from a project-relative file name point at the root directory that
    holds the file under that same relative name.
    """

    template_files: dict[str, Path] = field(default_factory=dict)
    initial_files: dict[str, Path] = field(default_factory=dict)
    public_folder_assets: dict[str, Path] = field(default_factory=dict)
    initial_dirs: list[str] = field(default_factory=list)
    custom_template_based_pages: dict[str, str] = field(default_factory=dict)
    custom_template_based_components: dict[str, str] = field(default_factory=dict)
    custom_template_based_routes: dict[str, str] = field(default_factory=dict)
    git_ignore: str = ""
    env: str = ""
    tailwind: TailwindBinaries = field(default_factory=TailwindBinaries)
    config_root: Path = DATA_ROOT
    readme: Path = DATA_ROOT
    make_file: Path = DATA_ROOT
    src_folder: Path = DATA_ROOT
    public_folder: Path = DATA_ROOT
    server_folder: Path = DATA_ROOT
    project_name: str = ""
    go_mod_name: str = ""


def default_cli_data() -> CliData:
    """A fresh copy of the data used by the project initialiser."""
    root = DATA_ROOT
    return CliData(
        public_folder_assets={
            "public/imageExample/blurred.jpeg": root,
            "public/imageExample/original.jpeg": root,
            "public/favicon.ico": root,
            "public/styles.css": root,
        },
        template_files={
            ".gothicCli/templates/Dockerfile-template": root,
            ".gothicCli/templates/samconfig-template.toml": root,
            ".gothicCli/templates/template-custom-domain-with-arn.yaml": root,
            ".gothicCli/templates/template-custom-domain.yaml": root,
            ".gothicCli/templates/template-default.yaml": root,
            ".gothicCli/templates/autoGenRoutes.go": root,
        },
        initial_files={
            "src/routes/autoGenRoutes.go": root,
            "src/pages/index.templ": root,
            "src/pages/revalidate.templ": root,
            "src/layouts/layout.templ": root,
            "src/css/app.css": root,
            "src/components/helloWorld.templ": root,
            "src/components/lazyLoad.templ": root,
            "src/api/helloWorld.go": root,
            "makefile": root,
            "tailwind.config.js": root,
            "README.md": root,
            "gothic-config.json": root,
        },
        initial_dirs=[
            "public",
            ".gothicCli",
            "src",
            "optimize",
            "public/imageExample",
            ".gothicCli/templates",
            "src/api",
            "src/components",
            "src/css",
            "src/layouts",
            "src/pages",
            "src/routes",
        ],
        git_ignore=GIT_IGNORE,
        env=ENV,
        tailwind=TailwindBinaries(mac=root, windows=root, linux=root, config=root),
        config_root=root,
        readme=root,
        make_file=root,
        src_folder=root,
        public_folder=root,
        server_folder=root,
        custom_template_based_pages={
            "src/pages/revalidate.templ": "Revalidate",
            "src/pages/index.templ": "Index",
        },
        custom_template_based_components={
            "src/components/helloWorld.templ": "HelloWorld",
            "src/components/lazyLoad.templ": "LazyLoad",
        },
        custom_template_based_routes={
            "src/api/helloWorld.go": "HelloWorld",
        },
    )