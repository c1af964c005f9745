import logging

from fleet.config import Config

logging.basicConfig(
    level=Config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

from app_factory import create_app  # noqa: E402

app = create_app()

if __name__ == "__main__":
    app.run(port=app.config["PORT"], debug=False)
