from secret_santa.core import environs
from secret_santa.web.main import create_app

app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app", host=environs.HOST, port=environs.PORT, reload=environs.RELOAD
    )
