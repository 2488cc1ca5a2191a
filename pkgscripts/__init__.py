"""Release automation for the package: gated publish and build setup.

Two commands live here. :mod:`pkgscripts.commands.publish` runs the registry
publish when the commit message carries the publish marker and a token is
available. :mod:`pkgscripts.commands.setup` runs the build script and installs
its artifact. Shared helpers live in :mod:`pkgscripts.runtime`.
"""

# SPDX-License-Identifier: MIT

__version__ = "1.0.0"

__all__ = ["__version__"]
