"""
Flowdesk — workflow graph editor core.

Graph model, workflow document codec, graph mutations and the
registration pipeline simulator behind the visual workflow editor.
"""

__version__ = "0.1.0"
