import uvicorn

from bookswap.server.config import settings

if __name__ == "__main__":
    uvicorn.run("bookswap.server.main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG)
