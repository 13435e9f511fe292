"""Structured logging building blocks: levels, write syncers, encoders, tees, samplers, observers and adapters."""

__version__ = "0.1.0"

__all__ = ["core", "encoder", "grpclog", "level", "observer", "sampler", "stream", "write_syncer"]