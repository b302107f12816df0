"""MiniBlog: user and post management over gRPC, a JSON gateway and plain HTTP."""

__version__ = "1.0.0"
