"""Quart app factory."""

import structlog
from quart import Quart, jsonify
from config.settings import settings
from storage.database import close_pool, get_pool, run_migrations
from storage.page_cache import PageCache
from utils.errors import RepositoryError

log = structlog.get_logger(__name__)


def create_app(pool=None, page_cache: PageCache | None = None) -> Quart:
    """Create and configure the Quart web application.

    With no ``pool`` the app connects and migrates on startup and closes
    the pool on shutdown.
    """
    app = Quart(__name__)
    app.secret_key = settings.web_secret_key

    # Store references for routes
    app.db_pool = pool  # type: ignore[attr-defined]
    app.page_cache = page_cache or PageCache(ttl=settings.page_cache_ttl)  # type: ignore[attr-defined]

    from web.routes.threads import threads_bp
    from web.routes.users import users_bp
    from web.routes.profile import profile_bp

    app.register_blueprint(threads_bp, url_prefix="/api/threads")
    app.register_blueprint(users_bp, url_prefix="/api/users")
    app.register_blueprint(profile_bp, url_prefix="/profile")

    owns_pool = pool is None

    @app.before_serving
    async def startup():
        if owns_pool:
            app.db_pool = await get_pool()  # type: ignore[attr-defined]
            await run_migrations(app.db_pool)  # type: ignore[attr-defined]

    @app.after_serving
    async def shutdown():
        if owns_pool:
            await close_pool()

    @app.errorhandler(RepositoryError)
    async def repository_error(error: RepositoryError):
        log.error("repository_error", error=str(error), cause=repr(error.__cause__))
        return jsonify({"error": error.operation}), 500

    @app.errorhandler(404)
    async def not_found(error):
        return jsonify({"error": "Not found"}), 404

    @app.route("/health")
    async def health():
        return {"status": "ok"}, 200

    return app


async def start_web() -> None:
    """Start the web server."""
    app = create_app()
    log.info("starting_web", port=settings.web_port)
    await app.run_task(host="0.0.0.0", port=settings.web_port)
