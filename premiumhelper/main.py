"""FastAPI application hosting the submission wizard and its plugins."""

from contextlib import asynccontextmanager
from pathlib import Path

import httpx
from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import FileResponse, HTMLResponse
from markupsafe import Markup

from .core.config import AppConfig
from .core.dependencies import HostState, get_host_state, request_context_for
from .core.directory import Directory
from .core.hooks import HookManager
from .core.logging import logger, setup_logging
from .core.models import SectionType
from .core.plugins import PluginManager
from .core.request import RequestContext
from .core.templates import OutputBuffer, TemplateRenderer, TemplateState
from .core.wizard import SUBMISSION_PAGE, default_steps
from .santaane.client import AbstractAnalyzer, ChatCompletionClient
from .santaane.routes import router as santaane_router


TEMPLATES_DIR = Path(__file__).parent / "templates"

# Plugin files the browser may fetch
PUBLIC_ASSET_SUFFIXES = {".css", ".js", ".woff", ".woff2", ".ttf", ".svg", ".png"}


def build_host(
    app_config: AppConfig,
    ai_transport: httpx.AsyncBaseTransport | None = None,
) -> HostState:
    """Initialize every host service from configuration."""
    directory = Directory(app_config.data_file)
    if directory.exists:
        directory.load()
    else:
        logger.warning(f"No directory at {app_config.data_file}, seeding a sample one")
        directory.initialize()

    hooks = HookManager()
    renderer = TemplateRenderer(TEMPLATES_DIR)

    plugin_manager = PluginManager(
        plugins_dir=app_config.plugins_dir,
        disabled_plugins=directory.get("config.disabled_plugins", []),
        hook_mgr=hooks,
        directory=directory,
        renderer=renderer,
    )
    loaded = plugin_manager.load_enabled_plugins()
    logger.info(f"Loaded {loaded} plugin(s) from {app_config.plugins_dir}")

    analyzer = AbstractAnalyzer(ChatCompletionClient(app_config.ai, transport=ai_transport))

    return HostState(
        config=app_config,
        directory=directory,
        hooks=hooks,
        renderer=renderer,
        plugin_manager=plugin_manager,
        analyzer=analyzer,
    )


def create_app(
    app_config: AppConfig | None = None,
    ai_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create the host application.

    Args:
        app_config: Configuration (read from the environment if None).
        ai_transport: Optional httpx transport for the AI client.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        config = app_config or AppConfig.from_env()
        setup_logging(config.log_level, config.log_file)
        app.state.host = build_host(config, ai_transport)
        yield

    app = FastAPI(
        title="Premium Submission Helper",
        description="Submission wizard host with premium AI abstract analysis",
        version="1.1.1",
        lifespan=lifespan,
    )
    app.include_router(santaane_router)

    @app.get("/plugins/{plugin_name}/{asset_path:path}")
    async def plugin_asset(
        plugin_name: str,
        asset_path: str,
        host: HostState = Depends(get_host_state),
    ):
        """Serve static assets of loaded plugins."""
        if not host.plugin_manager.is_loaded(plugin_name):
            raise HTTPException(status_code=404, detail="File not found")

        plugin_dir = host.config.plugins_dir / plugin_name
        file_path = plugin_dir / asset_path
        if file_path.suffix.lower() not in PUBLIC_ASSET_SUFFIXES:
            raise HTTPException(status_code=404, detail="File not found")

        # Validate path is within the plugin directory
        try:
            file_path.resolve().relative_to(plugin_dir.resolve())
        except ValueError:
            raise HTTPException(status_code=403, detail="Access denied")

        if not file_path.is_file():
            raise HTTPException(status_code=404, detail="File not found")

        return FileResponse(file_path, headers={"X-Content-Type-Options": "nosniff"})

    @app.get("/{venue_path}/submission", response_class=HTMLResponse)
    async def submission_wizard(
        context: RequestContext = Depends(request_context_for(SUBMISSION_PAGE)),
        host: HostState = Depends(get_host_state),
    ):
        """Render the submission wizard."""
        return HTMLResponse(render_submission_wizard(host, context))

    return app


def render_submission_wizard(host: HostState, context: RequestContext) -> str:
    """Run the wizard hooks for one request and render the page."""
    template = TemplateState(template="submission.html", state={"steps": default_steps()})
    host.hooks.emit("template_display", {"context": context, "template": template})

    steps = template.get_state("steps", [])

    # Template sections are rendered by whoever added them
    output = OutputBuffer()
    for step in steps:
        for section in step.sections:
            if section.type != SectionType.TEMPLATE:
                continue
            host.hooks.emit(
                "wizard_section",
                {
                    "context": context,
                    "section_id": section.id,
                    "renderer": host.renderer,
                    "output": output,
                },
            )

    return host.renderer.fetch(
        template.template,
        venue=context.venue,
        visitor=context.visitor,
        steps=[step.model_dump(mode="json") for step in steps],
        stylesheets=template.assets.stylesheets("backend"),
        scripts=template.assets.scripts("backend"),
        plugin_sections=Markup(output.getvalue()),
    )


app = create_app()
