"""
nichenerd configuration

Agent ids, endpoints, quiz constants and export behavior live here.
Environment variables override defaults for deployment flexibility.
"""

import os
from dataclasses import dataclass, field
from typing import Literal


@dataclass
class AgentConfig:
    """Remote agent identities and endpoint"""
    quiz_master_agent_id: str = os.getenv("QUIZ_MASTER_AGENT_ID", "6998513b3c9685c27823bbde")
    scorecard_agent_id: str = os.getenv("SCORECARD_AGENT_ID", "6998513bdad6f4a9e9c2df13")
    api_url: str = os.getenv("AGENT_API_URL", "http://localhost:3000/api/agent")
    api_key: str = os.getenv("AGENT_API_KEY", "")
    timeout_seconds: float = float(os.getenv("AGENT_TIMEOUT", "120.0"))


@dataclass
class TransportConfig:
    """Which transport carries agent calls"""
    backend: Literal["http", "claude", "mock"] = os.getenv("AGENT_TRANSPORT", "http")
    claude_model: str = os.getenv("CLAUDE_MODEL", "claude-sonnet-4-20250514")
    claude_max_tokens: int = int(os.getenv("CLAUDE_MAX_TOKENS", "1024"))


@dataclass
class QuizConfig:
    """Quiz shape"""
    total_questions: int = int(os.getenv("QUIZ_LENGTH", "10"))
    user_id_key: str = "nichenerd_user_id"


@dataclass
class ExportConfig:
    """Scorecard delivery"""
    download_dir: str = os.getenv("SCORECARD_DIR", ".")
    copied_ack_seconds: float = float(os.getenv("COPIED_ACK_SECONDS", "2.0"))
    share_hashtag_line: str = "How deep does YOUR knowledge go? #NicheNerd"


@dataclass
class Config:
    """Top-level settings; import the `config` singleton below"""
    agents: AgentConfig = field(default_factory=AgentConfig)
    transport: TransportConfig = field(default_factory=TransportConfig)
    quiz: QuizConfig = field(default_factory=QuizConfig)
    export: ExportConfig = field(default_factory=ExportConfig)

    @classmethod
    def offline_mode(cls) -> "Config":
        """Play without network access (mock agents)"""
        cfg = cls()
        cfg.transport.backend = "mock"
        return cfg

    @classmethod
    def fast_mode(cls) -> "Config":
        """Offline play with short acknowledgement timers, for tests"""
        cfg = cls.offline_mode()
        cfg.export.copied_ack_seconds = 0.05
        return cfg


# Singleton
config = Config()
