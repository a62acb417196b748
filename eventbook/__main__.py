"""
Run the API with granian: `python -m eventbook`

Same as `granian eventbook.main:app --interface asgi --host 0.0.0.0 --port 8100`.
"""

from granian import Granian
from granian.constants import Interfaces

from eventbook.platform.config.core_setting import settings


def main() -> None:
    Granian(
        'eventbook.main:app',
        address=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        workers=settings.SERVER_WORKERS,
        interface=Interfaces.ASGI,
    ).serve()


if __name__ == '__main__':
    main()
