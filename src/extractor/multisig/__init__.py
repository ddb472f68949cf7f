from src.extractor.multisig.traversal import MultisigTraversal, MULTISIG_HEADER
