"""
Centralized configuration management for P&ID Sync.

All environment variables and settings are managed here so the canvas engines,
the persistence mapper and the API share one source of truth.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional, Dict, Any
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Centralized settings for P&ID Sync.

    All configuration is loaded from environment variables with sensible defaults.
    Uses Pydantic for validation and type safety.
    """

    # === Application Settings ===
    app_name: str = Field(default="P&ID Sync", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: Optional[str] = Field(default=None, description="Optional log file path")

    # === API Settings ===
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")

    # === Database Settings ===
    neo4j_uri: str = Field(default="bolt://localhost:7687", description="Neo4j database URI", validation_alias="NEO4J_URI")
    neo4j_user: str = Field(default="neo4j", description="Neo4j username", validation_alias="NEO4J_USER")
    neo4j_password: Optional[str] = Field(default=None, description="Neo4j password", validation_alias="NEO4J_PASSWORD")
    neo4j_database: Optional[str] = Field(default=None, description="Neo4j database name; server default when unset", validation_alias="NEO4J_DATABASE")
    neo4j_max_connections: int = Field(default=10, description="Max Neo4j connections")
    neo4j_connection_timeout: int = Field(default=60, description="Neo4j connection timeout")

    # === Canvas Geometry Settings ===
    grid_size: int = Field(default=10, gt=0, description="Canvas grid size used for snapping")
    geometry_tolerance: float = Field(default=5.0, ge=0.0, description="Tolerance for segment and alignment tests")
    orientation_tolerance_deg: float = Field(default=10.0, ge=0.0, le=45.0, description="Angular tolerance for component orientation")
    splice_perpendicular_offset: float = Field(default=0.0, description="Offset applied across the pipe when snapping a spliced component")
    label_padding: float = Field(default=15.0, description="Distance between a node outline and its tag label")

    # === Routing Settings ===
    router_name: str = Field(default="manhattan", description="Router used for pipe edges")
    router_padding: int = Field(default=10, description="Obstacle padding for the pipe router")
    background_frame_id: str = Field(default="SHEET_FRAME_A2", description="Id of the drawing frame node")
    background_frame_shape: str = Field(default="drawing-frame-a2", description="Shape kind of the drawing frame")

    # === Shape Library Settings ===
    shape_library_dir: Optional[Path] = Field(default=None, description="Extra directory of shape definition JSON files")

    # === Drawing Catalog Settings ===
    default_drawing_name: str = Field(default="PID-001", description="Name of the drawing created on an empty catalog")

    # === Logging Configuration ===
    @property
    def logging_config(self) -> Dict[str, Any]:
        """Get logging configuration."""
        return {
            'level': self.log_level,
            'file': self.log_file,
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        }

    @property
    def database_config(self) -> Dict[str, Any]:
        """Get database configuration as dictionary."""
        return {
            'uri': self.neo4j_uri,
            'user': self.neo4j_user,
            'password': self.neo4j_password,
            'database': self.neo4j_database,
            'max_connections': self.neo4j_max_connections,
            'connection_timeout': self.neo4j_connection_timeout,
        }

    @property
    def routing_config(self) -> Dict[str, Any]:
        """Get the base router configuration for pipe edges."""
        return {
            'name': self.router_name,
            'padding': self.router_padding,
            'exclude_nodes': [self.background_frame_id],
        }

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()

    @field_validator('shape_library_dir', mode='before')
    @classmethod
    def validate_shape_library_dir(cls, v):
        if v in (None, ""):
            return None
        return Path(v) if isinstance(v, str) else v

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to ensure settings are only loaded once per application lifecycle.
    """
    return Settings()
