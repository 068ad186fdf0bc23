from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # 项目信息
    APP_NAME: str = "BookSwap"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = True

    # 服务
    HOST: str = "127.0.0.1"
    PORT: int = 5000

    # 数据库
    DATABASE_DIR: Path = Path(__file__).resolve().parent.parent.parent / "data"
    DATABASE_NAME: str = "bookswap.db"

    @property
    def DATABASE_URL(self) -> str:
        self.DATABASE_DIR.mkdir(parents=True, exist_ok=True)
        return f"sqlite+aiosqlite:///{self.DATABASE_DIR / self.DATABASE_NAME}"

    # JWT
    JWT_SECRET_KEY: str = "dev-secret-key-change-in-production"
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 天

    # 封面图片上传
    UPLOAD_DIR: Path = Path(__file__).resolve().parent.parent.parent / "data" / "uploads"
    UPLOAD_URL_PREFIX: str = "/uploads"
    MAX_IMAGE_BYTES: int = 5 * 1024 * 1024

    # CORS
    CORS_ORIGINS: list[str] = ["http://localhost:5173", "http://localhost:8080", "http://localhost:3000"]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
