"""SOAP invocation: client adapter, dispatch, result normalization and access rights."""
