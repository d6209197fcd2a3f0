"""
Payouts app: the payout document engine.

This app handles:
- Source aggregation and balance checks for new payouts
- Payout document lifecycle (pending, in_progress, paid, skip, failed)
- Signature workflow with the document signer
- Audit trail of every document mutation

Related apps:
    - core: BaseModel, ServiceResult and the application exception base

Usage:
    from payouts.context import build_payout_context
    from payouts.services import PayoutDocumentService

    service = PayoutDocumentService(build_payout_context())
    result = service.create_payout_document("m-1", ["r-1"], "March", ip=None)
"""
