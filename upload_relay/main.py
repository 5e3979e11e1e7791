"""upload-relay - multipart upload relay powered by Robyn."""

from robyn import Robyn

from upload_relay.api.health import router as health_router
from upload_relay.api.pages import router as pages_router
from upload_relay.api.upload import router as upload_router
from upload_relay.core.lifespan import create_lifespan
from upload_relay.core.logger import LogIcon, logger
from upload_relay.core.settings import settings as st
from upload_relay.events.relay import RelayEvent
from upload_relay.middlewares.base import MiddlewareHandler
from upload_relay.middlewares.files import FileUploadOpenAPIMiddleware

app = Robyn(__file__)

# Lifespan events
lifespan = create_lifespan(app)
lifespan.register(RelayEvent, config=st.relay_config)

app.startup_handler(lifespan.startup)
app.shutdown_handler(lifespan.shutdown)

# Routers
app.include_router(pages_router)
app.include_router(upload_router)
app.include_router(health_router)

# Static assets
app.serve_directory(route="/static", directory_path=str(st.PUBLIC_DIR))

# Middlewares
middlewares = MiddlewareHandler(app)
middlewares.register(FileUploadOpenAPIMiddleware)


def main() -> None:
    logger.info("STARTING %s | HOST=%s | PORT=%s", st.API_NAME, st.API_HOST, st.PORT, icon=LogIcon.START)
    app.start(host=st.API_HOST, port=st.PORT)


if __name__ == "__main__":
    main()
