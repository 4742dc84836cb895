"""HTTP REST transport for agents-mcp."""

import logging
from importlib.metadata import version as pkg_version

from aiohttp import web

from .errors import AgentsError
from .tools import AgentTools, error_text, not_found_text

logger = logging.getLogger("agents_mcp")

OPTIONAL_RUN_FIELDS = ("model", "base_url", "effort")
OPTIONAL_SAVE_FIELDS = (
    "description",
    "model",
    "effort",
    "inputs_required",
    "inputs_optional",
    "outputs",
    "overwrite",
)


class PresetHTTPServer:
    """Serves the agent tools over HTTP.

    Tool replies are ``{"response": text}`` with status 200, failures
    included (``ERROR: ...``), the same contract the MCP tools follow.
    """

    def __init__(
        self,
        tools: AgentTools,
        host: str = "127.0.0.1",
        port: int = 8080,
        token: str | None = None,
    ):
        self.tools = tools
        self.host = host
        self.port = port
        self.token = token
        self._runner: web.AppRunner | None = None

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    def _check_auth(self, request: web.Request) -> bool:
        if not self.token:
            return True
        auth = request.headers.get("Authorization", "")
        return auth == f"Bearer {self.token}"

    @web.middleware
    async def _auth_middleware(self, request: web.Request, handler):
        if request.path.startswith("/health"):
            return await handler(request)
        if not self._check_auth(request):
            return web.json_response({"error": "unauthorized"}, status=401)
        return await handler(request)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    async def _json_body(request: web.Request) -> dict | None:
        try:
            body = await request.json()
        except ValueError:
            return None
        return body if isinstance(body, dict) else None

    @staticmethod
    def _missing(body: dict, *fields: str) -> web.Response | None:
        for name in fields:
            if not body.get(name):
                return web.json_response({"error": f"{name} is required"}, status=400)
        return None

    @staticmethod
    def _reply(text: str) -> web.Response:
        return web.json_response({"response": text})

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------

    def _get_version(self) -> str:
        try:
            return pkg_version("agents-mcp")
        except Exception:
            return "unknown"

    async def _health(self, _request: web.Request) -> web.Response:
        return web.json_response({
            "status": "ok",
            "version": self._get_version(),
            "presets_dir": str(self.tools.store.root),
        })

    async def _run_agent(self, request: web.Request) -> web.Response:
        body = await self._json_body(request)
        if body is None:
            return web.json_response({"error": "JSON object body is required"}, status=400)
        missing = self._missing(body, "query", "system_prompt")
        if missing:
            return missing
        options = {k: body.get(k) for k in OPTIONAL_RUN_FIELDS}
        result = await self.tools.run_agent(body["query"], body["system_prompt"], **options)
        return self._reply(result)

    async def _run_preset(self, request: web.Request) -> web.Response:
        body = await self._json_body(request)
        if body is None:
            return web.json_response({"error": "JSON object body is required"}, status=400)
        missing = self._missing(body, "query")
        if missing:
            return missing
        options = {k: body.get(k) for k in OPTIONAL_RUN_FIELDS}
        result = await self.tools.run_preset(body["query"], request.match_info["name"], **options)
        return self._reply(result)

    async def _list_presets(self, _request: web.Request) -> web.Response:
        return self._reply(await self.tools.list_presets())

    async def _save_preset(self, request: web.Request) -> web.Response:
        body = await self._json_body(request)
        if body is None:
            return web.json_response({"error": "JSON object body is required"}, status=400)
        missing = self._missing(body, "name", "system_prompt")
        if missing:
            return missing
        if not isinstance(body.get("overwrite", False), bool):
            return web.json_response({"error": "overwrite must be true or false"}, status=400)
        options = {k: body[k] for k in OPTIONAL_SAVE_FIELDS if k in body}
        result = await self.tools.save_preset(body["name"], body["system_prompt"], **options)
        return self._reply(result)

    async def _delete_preset(self, request: web.Request) -> web.Response:
        return self._reply(await self.tools.delete_preset(request.match_info["name"]))

    async def _preset_content(self, request: web.Request) -> web.Response:
        name = request.match_info["name"]
        try:
            content = self.tools.preset_content(name)
        except AgentsError as exc:
            return web.Response(text=error_text(str(exc)), status=500, content_type="text/plain")
        if content is None:
            return web.Response(text=not_found_text(name), status=404, content_type="text/plain")
        return web.Response(text=content, content_type="text/markdown")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _build_app(self) -> web.Application:
        app = web.Application(middlewares=[self._auth_middleware])
        app.router.add_get("/health", self._health)
        app.router.add_post("/api/agents/run", self._run_agent)
        app.router.add_get("/api/presets", self._list_presets)
        app.router.add_post("/api/presets", self._save_preset)
        app.router.add_get("/api/presets/{name}", self._preset_content)
        app.router.add_delete("/api/presets/{name}", self._delete_preset)
        app.router.add_post("/api/presets/{name}/run", self._run_preset)
        return app

    async def start(self) -> None:
        app = self._build_app()
        self._runner = web.AppRunner(app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()
        logger.info("agents-mcp listening on %s:%s", self.host, self.port)

    async def stop(self) -> None:
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            logger.info("agents-mcp stopped")
