"""Gateway tool implementations.

Organization:
- containers.py, images.py, networks.py, volumes.py: core engine objects
- exec.py: exec sessions
- system.py: daemon info, events and registry auth
- swarm.py: swarm, nodes, services and tasks
- secrets.py: swarm secrets and configs
- plugins.py: engine plugins
- hub.py: Docker Hub repositories, tags, webhooks and builds
- utility.py: credential-independent helpers
"""

from mcp_docker_gateway.tools.common import TenantClientFactory
from mcp_docker_gateway.tools.registration import register_all_tools

__all__ = ["TenantClientFactory", "register_all_tools"]
