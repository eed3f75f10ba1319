"""Run the relay with uvicorn: ``python -m coach_relay``."""
import uvicorn

from coach_relay.core.config import get_settings


def main() -> None:
    config = get_settings()
    uvicorn.run('coach_relay.main:app', host=config.HOST, port=config.PORT)


if __name__ == '__main__':
    main()
