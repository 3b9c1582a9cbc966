"""High-level tracing on top of the minimal path search."""

from .contour import trace_contour, trace_segments

__all__ = ["trace_contour", "trace_segments"]
