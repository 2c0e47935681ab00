"""ApplyDesk: profile and job-application tracking over a MongoDB backend."""

__version__ = "0.1.0"
