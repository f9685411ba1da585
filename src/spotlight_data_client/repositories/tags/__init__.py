from .tag_ledger import TagLedger, parse_tag_list

__all__ = ["TagLedger", "parse_tag_list"]
