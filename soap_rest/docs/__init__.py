from .synthesizer import DocSynthesizer, base_api_doc, camelize

__all__ = ["DocSynthesizer", "base_api_doc", "camelize"]
