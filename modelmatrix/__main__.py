# modelmatrix/__main__.py
import uvicorn

from modelmatrix.core.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "modelmatrix.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=settings.PORT,
    )


if __name__ == "__main__":
    main()
