"""SwiftRoute — delivery dispatch backend."""
