"""State/store layer.

Holds the client-side mirrors of backend state. Inbound channel frames
and HTTP reads both land here, and every replace is announced to
listeners.
"""
