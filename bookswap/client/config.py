import os
from dataclasses import dataclass, field
from pathlib import Path


def _default_token_file() -> Path:
    return Path(os.getenv("BOOKSWAP_TOKEN_FILE", Path.home() / ".bookswap" / "token.json"))


@dataclass
class ClientConfig:
    # REST 接口地址
    api_url: str = os.getenv("BOOKSWAP_API_URL", "http://localhost:5000")
    # 静态资源（封面图片）地址，默认与 api_url 相同
    base_url: str = os.getenv("BOOKSWAP_BASE_URL", "")
    token_file: Path = field(default_factory=_default_token_file)
    timeout: float = float(os.getenv("BOOKSWAP_TIMEOUT", "15"))

    @property
    def asset_base_url(self) -> str:
        return (self.base_url or self.api_url).rstrip("/")


config = ClientConfig()
