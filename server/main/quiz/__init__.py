"""
Quiz attempt lifecycle: answer normalization, answer-key resolution,
scoring and the begin / save-progress / complete state machine.
"""
