"""
Manage htpasswd users stored in a Kubernetes Secret.

The Secret holds a legacy flat credential file (`username:{SHA}digest` lines)
under a single key, as consumed by ingress controllers and web servers doing
basic authentication.
"""

__prog__ = "kubectl-htpasswd"
__version__ = "0.1.0"
