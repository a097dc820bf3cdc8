"""
Build system components for avrlibc-build.

This module provides:
- Header eligibility policy and header discovery
- The native avr-libc build driver (bootstrap, configure, make)
- Rust binding generation with bindgen
- Build orchestration
"""

from .bindings import BindgenBuilder, BindingGenerator, BindingRequest, GeneratedBindings
from .header_policy import DENY_LIST, DEVICE_SPECIFIC_LIST, is_eligible
from .header_scanner import HeaderScanner
from .native_build import BuildArtifacts, BuildStage, NativeBuildDriver
from .orchestrator import BuildResult, LibcBuildOrchestrator
from .process_runner import CommandResult, ProcessRunner

__all__ = [
    "BindgenBuilder",
    "BindingGenerator",
    "BindingRequest",
    "GeneratedBindings",
    "DENY_LIST",
    "DEVICE_SPECIFIC_LIST",
    "is_eligible",
    "HeaderScanner",
    "BuildArtifacts",
    "BuildStage",
    "NativeBuildDriver",
    "BuildResult",
    "LibcBuildOrchestrator",
    "CommandResult",
    "ProcessRunner",
]
