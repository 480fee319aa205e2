"""Core services shared by every RecallForge module.

- logging: structured logger factory
- exceptions: error hierarchy with fix suggestions
- config: dataclass configuration and YAML loading
- env: validated environment variable getters
"""
