"""quickref - local-first tldr page viewer

Philosophy:
- Ruthless simplicity
- Brick architecture (self-contained modules)
- Pure core, thin presentation shell
- Fail fast with helpful guidance

quickref downloads the community-maintained tldr page bundle once, keeps it in
a local cache, and renders pages as styled terminal text without touching the
network again until the next update.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
