from llm_mesh.utils.sse import SSEFrameSplitter, format_sse, iter_frames

__all__ = ["SSEFrameSplitter", "format_sse", "iter_frames"]
