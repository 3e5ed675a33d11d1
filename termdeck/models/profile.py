"""Terminal profile models."""

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field


ShellType = Literal['bash', 'zsh', 'fish', 'powershell', 'cmd', 'custom']


class TerminalProfile(BaseModel):
    """Shell and appearance settings a session is opened with."""
    id: str
    name: str
    shell: ShellType = 'bash'
    shell_path: Optional[str] = None
    shell_args: List[str] = Field(default_factory=list)
    font_size: int = Field(14, ge=6, le=72)
    font_family: str = "monospace"
    theme: str = "default"
    is_default: bool = False
    env_variables: Dict[str, str] = Field(default_factory=dict)
    working_directory: Optional[str] = None
