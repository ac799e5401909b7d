"""helm-release-engine: reconcile Helm release state stored in Kubernetes."""

__version__ = "0.1.0"
