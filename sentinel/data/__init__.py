"""Static data bundled with Sentinel: the vulnerability knowledge base and demo contracts."""
