"""Video analysis pipeline package."""

from .analysis import VIDEO_ANALYSIS_PROMPT, analyze_video, process_video_upload

__all__ = ["VIDEO_ANALYSIS_PROMPT", "analyze_video", "process_video_upload"]
