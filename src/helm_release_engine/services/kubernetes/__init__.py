"""Shared infrastructure for Kubernetes-backed service managers."""

from helm_release_engine.services.kubernetes.base import K8sBaseManager

__all__ = ["K8sBaseManager"]
