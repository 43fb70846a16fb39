from shopledger.application import create_app
from shopledger.core.logging import setup_logging


def run() -> None:
    import uvicorn

    uvicorn.run("shopledger.main:app", host="0.0.0.0", port=8000)


setup_logging()
app = create_app()


if __name__ == "__main__":
    run()


__all__ = ["app", "run"]
