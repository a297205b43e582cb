from dotenv import load_dotenv

load_dotenv(".env.local"); load_dotenv()  # also loads .env if present

from inspector.app import create_app  # noqa: E402

app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=app.state.settings.host, port=app.state.settings.port)
