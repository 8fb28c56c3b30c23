"""Refscout - Resolve the NuGet assemblies a .csproj project compiles against."""

from refscout.config import Hierarchy, PackageReference, ResolverConfig
from refscout.resolver import ProjectResolver
from refscout.workspace import Workspace

__version__ = "0.1.0"
__all__ = ["Hierarchy", "PackageReference", "ProjectResolver", "ResolverConfig", "Workspace"]
