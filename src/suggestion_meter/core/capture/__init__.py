"""Suggestion capture pipeline.

Leaf-first:

1. ``classifier``: which edits look like suggestion insertions.
2. ``episode``: debounced state machine buffering episode snapshots.
3. ``delta``: text inserted between the episode's snapshots.
4. ``tokenizer`` / ``estimator``: token count → energy → emissions.
5. ``session``: the session context wiring the above to a log sink and
   a display surface.
6. ``service``: single-consumer inbox feeding host messages to a session
   on the event loop.
"""
