"""
Summary: Application services orchestrating the features.
Why: Keep use-case wiring out of the CLI layer.
"""
