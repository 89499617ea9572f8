"""
Default mapping from wallet addresses to checkout address requests.
"""

from __future__ import annotations

from typing import Optional

from walletpay.models import AddressRequest, WalletAddress


def map_wallet_address(address: WalletAddress, address_id: Optional[str] = None) -> AddressRequest:
    """
    Convert a wallet address into a checkout address request.

    The last word of the wallet name becomes the last name, everything before
    it the first name. Address lines 2 and 3 are joined. When address_id is
    given the request updates that remote address, otherwise it creates one.
    """
    name_parts = address.name.split()
    first_name = " ".join(name_parts[:-1])
    last_name = name_parts[-1] if name_parts else ""

    return AddressRequest(
        id=address_id,
        first_name=first_name,
        last_name=last_name,
        company=address.company_name,
        address1=address.address1,
        address2=address.address2 + address.address3,
        city=address.locality,
        state_or_province=address.administrative_area,
        state_or_province_code=address.administrative_area,
        postal_code=address.postal_code,
        country_code=address.country_code,
        phone=address.phone_number,
    )
