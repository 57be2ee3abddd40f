"""
The APP layer holds editor state (tool mode, colour, gestures, selection)
and exposes it to a view through Qt signals. It draws nothing itself.
"""
