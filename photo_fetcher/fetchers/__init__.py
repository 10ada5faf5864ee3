"""
Rendering sessions and the per-record fetch pipeline.
"""

from .base import RenderingSession, FetchPipeline
from .http_session import HttpSession

__all__ = ['RenderingSession', 'FetchPipeline', 'HttpSession']
