"""btlr: run one command in parallel across glob-matched directories."""

__version__ = "0.1.0"
