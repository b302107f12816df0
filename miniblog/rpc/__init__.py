"""gRPC transport for the MiniBlog service."""
