"""
SCC Admission Webhook
Validating admission webhook that keeps the default OpenShift Security Context
Constraints (SCCs) immutable and caps the priority of custom SCCs.
"""

__version__ = "1.0.0"
__author__ = "OpenShift SCC Admission Webhook"
__description__ = "Admission control for OpenShift Security Context Constraints"
