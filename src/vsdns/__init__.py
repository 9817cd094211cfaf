"""DNS endpoints for F5 VirtualServer resources running in Kubernetes."""
