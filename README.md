# gothicframework

A command-line toolkit for Gothic web apps: server-rendered pages written as
templ components, styled with Tailwind, and deployed to AWS Lambda behind
CloudFront with AWS SAM.

## Installation

```
pip install gothicframework
```

The commands drive external tools, which must be on your `PATH` when a command
needs them: `go`, `templ`, `make`, `git`, `sam` and `aws`.

## Commands

Every command runs in the root of a project and reads `gothic-config.json`
there. On failure a command prints `Error: <message>` to standard error and
exits with status 1.

```
gothicframework init
```

Asks for a stack name, which must be kebab case (lowercase letters and digits
separated by single dashes), and a Go module name. It then creates the
directories `public`, `public/imageExample`, `optimize`, `.gothicCli`,
`.gothicCli/templates`, `src`, `src/api`, `src/components`, `src/css`,
`src/layouts`, `src/pages` and `src/routes`; writes the Tailwind executable for
the current system (`tailwindcss`, or `tailwindcss.exe` on Windows), `.env`,
`.gitignore` and a random app id in `.gothicCli/app-id.txt`; renders `main.go`,
the starter pages, components, API handler and deployment templates; and runs
`go mod init`, `go mod tidy`, `templ generate`, the route generator and
`git init`.

```
gothicframework build
```

Runs `templ generate` and regenerates `src/routes/autoGenRoutes.go` from the
template `.gothicCli/templates/autoGenRoutes.go`.

```
gothicframework hot-reload
```

Starts the project's Tailwind executable in watch mode, waits four seconds,
then builds the app with `go build -o tmp/main main.go` and runs it. It watches
`src` and, when a `.go`, `.tpl`, `.tmpl`, `.templ` or `.html` file changes,
regenerates the routes, rebuilds and restarts the app. Changes inside `assets`,
`tmp`, `vendor`, `public` or `routes` directories are ignored, and generated
`*_templ.go` files only count when they are deleted. It also runs
`templ generate -watch -proxy=http://localhost:8080`. Stop it with Ctrl-C.

```
gothicframework optimize-images
```

For every file in `optimize/` (`.png`, `.jpg`, `.jpeg`, `.webp`), writes
`public/<name>/original.<ext>` and a smaller `public/<name>/blurred.<ext>`,
by default 20% of the original size (`optimizeImages.lowResolutionRate` in
`gothic-config.json` changes the percentage). JPEG originals are saved at
quality 100 and blurred copies at quality 20; WebP inputs are written in PNG
format under their `.webp` names. A subdirectory or any other extension in
`optimize/` stops the command with an error.

```
gothicframework deploy --stage dev --action deploy
gothicframework deploy --stage dev --action delete
```

`--stage`/`-s` defaults to `dev` and `--action`/`-a` to `deploy`; only
`deploy` and `delete` are accepted. Both actions first write `template.yaml`,
`Dockerfile` and `samconfig.toml` from `.gothicCli/templates`, then run
`templ generate`, the route generator, `make css` and `sam build`.
`deploy` then runs `sam deploy` for the stack `<projectName>-<stage>`, removes
the three generated files, invalidates the CloudFront cache and uploads
`public/` to `s3://<projectName>-<stage>-<appId>/public`; failures of those
last two steps are reported but do not fail the command. `delete` removes the
uploaded assets, runs `sam delete` and removes the generated files.

## File-based routing

Routes are collected from the generated `*_templ.go` files in `src/pages` and
`src/components` and from the `.go` files in `src/api`:

- `src/pages/index.templ` is served at `/`; `src/pages/about.templ` at `/about`.
- In pages and components, a path segment `var_id` becomes the parameter `{id}`.
- Components are served under `/components/...`, API handlers under `/api/...`.
- A page or component may declare a `var X = routes.RouteConfig[...]{...}` to
  set its cache mode and HTTP method; an API handler may declare a
  `var X = routes.ApiRouteConfig{...}`. Without one, the default config is used.

The cache headers the modes send are given by
`gothicframework.routing.RouteConfig.cache_control()`: `STATIC` sends
`max-age=31536000`, `ISR` sends `max-age=N, stale-while-revalidate=N,
stale-if-error=N`, and `DYNAMIC` sends none.

## Configuration

`gothic-config.json` holds:

- `projectName`, `goModuleName`
- `optimizeImages.lowResolutionRate`
- `deploy`: `region`, `profile`, `serverMemory`, `serverTimeout`,
  `customDomain` (boolean) and `stages`, a map from stage name to
  `BucketName`, `LambdaName`, `hostedZoneId`, `customDomain`,
  `certificateArn` and `env` (variables for the Lambda).

If `BucketName` or `LambdaName` is missing, both become
`<projectName>-<stage>-<appId>`. With `deploy.customDomain` set, the stage needs
`customDomain` and `hostedZoneId`, and `certificateArn` as well unless the
region is `us-east-1`.

`gothicframework.config.load_config(path)` reads the file into a `Config`
dataclass; `parse_config(data)` does the same for already decoded JSON.

## Templates

Project files are rendered with `gothicframework.templates.render_template(text,
data)`. It supports `{{.Field}}` lookups (mapping keys or attributes, tried as
written and in snake case), `if`, `with`, `range`, `else`, `end`, comments and
the `{{-`/`-}}` whitespace trims. `TemplateHelper` renders and copies files with
it.

## What this package does not include

`init` reads its starter files — the Tailwind executables, `server/server.go`,
the example sources under `src`, the `.gothicCli/templates` files, `makefile`,
`README.md`, `gothic-config.json` and the `public` assets — from a `resources`
directory inside the installed package. The package does not ship those files;
without them `init` writes an empty Tailwind file and an empty `main.go` and then
stops with an error. The web server runtime that generated projects import is
not part of this package either.