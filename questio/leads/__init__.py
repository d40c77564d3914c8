"""
Lead capture - records a contact before any report generation is paid for.
"""

from questio.leads.store import JsonlLeadStore, LeadAck, LeadCaptureError, LeadRecorder

__all__ = ["JsonlLeadStore", "LeadAck", "LeadCaptureError", "LeadRecorder"]
