"""UCPF engine: framework analysis and creative patterns."""

from deeplucid.engine.creative import CreativePatterns
from deeplucid.engine.ucpf import UcpfAnalysis, UcpfCore

__all__ = ["CreativePatterns", "UcpfAnalysis", "UcpfCore"]
