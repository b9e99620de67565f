from herbscan.workflows.scan_workflow import ScanWorkflow

__all__ = ["ScanWorkflow"]
