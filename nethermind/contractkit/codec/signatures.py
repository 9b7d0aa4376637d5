from eth_utils.abi import event_signature_to_log_topic, function_signature_to_4byte_selector

from nethermind.contractkit.types.abi import AbiEntry


def full_name(entry: AbiEntry) -> str:
    """
    Converts an ABI entry to its signature.  If the declared name already contains a parameter list, it is
    returned unchanged.

    >>> from nethermind.contractkit.types.abi import AbiEntry
    >>> entry = AbiEntry.from_json(
    ...     {"type": "function", "name": "transferFrom", "inputs": [{"type": "address"}, {"type": "uint"}]}
    ... )
    >>> full_name(entry)
    'transferFrom(address,uint256)'

    """
    if "(" in entry.name:
        return entry.name
    return f"{entry.name}({','.join(param.type.canonical for param in entry.inputs)})"


def display_name(signature: str) -> str:
    """
    Removes types from a signature

    >>> display_name("swap(address,address,uint256,uint256,int128)")
    'swap'
    """
    index = signature.find("(")
    if index != -1:
        return signature[:index]
    return signature


def type_suffix(signature: str) -> str:
    """
    Returns the parameter types of a signature with whitespace removed

    >>> type_suffix("transfer(address, uint256)")
    'address,uint256'
    """
    index = signature.find("(")
    if index == -1:
        return ""
    close = signature.rfind(")")
    if close < index:
        close = len(signature)
    return signature[index + 1 : close].replace(" ", "")


def selector(entry: AbiEntry) -> str:
    """4 byte function selector as 8 uppercase hex characters"""
    return function_signature_to_4byte_selector(full_name(entry)).hex().upper()


def event_topic(entry: AbiEntry) -> str:
    """32 byte event signature topic as 64 uppercase hex characters"""
    return event_signature_to_log_topic(full_name(entry)).hex().upper()
