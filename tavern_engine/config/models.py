"""Pydantic models for configuration validation."""

from pathlib import Path
from typing import Literal
from pydantic import BaseModel, Field, field_validator, ConfigDict


class LLMConfig(BaseModel):
    """LLM backend configuration."""
    
    provider: Literal["openai", "claude", "koboldcpp"] = "openai"
    base_url: str = "https://api.openai.com"
    api_key: str = ""
    model: str = "gpt-4o-mini"
    temperature: float = Field(default=0.8, ge=0.0, le=2.0)
    max_response_tokens: int = Field(default=1024, gt=0, le=32768)
    timeout_seconds: int = Field(default=120, gt=0)
    
    @field_validator('base_url')
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Ensure URL is properly formatted."""
        if not v.startswith(('http://', 'https://')):
            raise ValueError('base_url must start with http:// or https://')
        return v.rstrip('/')


class ContextConfig(BaseModel):
    """Prompt assembly configuration."""
    
    user_name: str = "User"
    min_history_tokens: int = Field(default=512, ge=0)


class PathsConfig(BaseModel):
    """File path configuration."""
    
    presets: Path = Path("presets")
    
    @field_validator('presets')
    @classmethod
    def validate_path(cls, v: Path) -> Path:
        """Ensure paths are cross-platform."""
        return Path(v)


class SystemConfig(BaseModel):
    """Top-level system configuration."""
    
    model_config = ConfigDict(extra='ignore')
    
    llm: LLMConfig = Field(default_factory=LLMConfig)
    context: ContextConfig = Field(default_factory=ContextConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    debug: bool = False
    api_host: str = "localhost"
    api_port: int = Field(default=8080, gt=0, le=65535)
