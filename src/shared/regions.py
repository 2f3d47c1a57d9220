"""Delivery regions: the districts we ship to, with Bangla labels and thanas.

Dhaka is the home region and ships at the lower fee; every other district
ships at the standard fee (see ``shared.pricing.DeliveryPolicy``).
"""

from typing import NamedTuple


class DeliveryRegion(NamedTuple):
    name: str
    label_bn: str
    is_home: bool
    thanas: tuple[str, ...]


REGIONS = (
    DeliveryRegion(
        name="Dhaka",
        label_bn="ঢাকা",
        is_home=True,
        thanas=(
            "ধানমন্ডি", "গুলশান", "বনানী", "উত্তরা", "মিরপুর", "রামনা", "তেজগাঁও", "ওয়ারী",
            "সূত্রাপুর", "কোতোয়ালী", "শাহবাগ", "নিউমার্কেট", "হাজারীবাগ", "লালবাগ", "চকবাজার",
        ),
    ),
    DeliveryRegion(
        name="Chattogram",
        label_bn="চট্টগ্রাম",
        is_home=False,
        thanas=(
            "কোতোয়ালী", "পাঁচলাইশ", "ডবলমুরিং", "চান্দগাঁও", "বায়েজিদ", "হালিশহর", "আগ্রাবাদ",
            "সীতাকুণ্ড", "মীরসরাই", "সন্দ্বীপ", "বোয়ালখালী", "আনোয়ারা", "চন্দনাইশ", "সাতকানিয়া",
        ),
    ),
    DeliveryRegion(
        name="Sylhet",
        label_bn="সিলেট",
        is_home=False,
        thanas=(
            "সিলেট সদর", "জৈন্তাপুর", "কানাইঘাট", "বিশ্বনাথ", "বালাগঞ্জ", "বেলাইছড়ি",
            "ফেঞ্চুগঞ্জ", "গোলাপগঞ্জ", "গোয়াইনঘাট", "হবিগঞ্জ", "লাখাই", "নবীগঞ্জ",
        ),
    ),
    DeliveryRegion(
        name="Rajshahi",
        label_bn="রাজশাহী",
        is_home=False,
        thanas=(
            "রাজশাহী সদর", "বাগমারা", "চারঘাট", "দুর্গাপুর", "গোদাগাড়ী", "মোহনপুর",
            "পুঠিয়া", "তানোর", "নাটোর", "সিংড়া", "বড়াইগ্রাম", "গুরুদাসপুর",
        ),
    ),
    DeliveryRegion(
        name="Khulna",
        label_bn="খুলনা",
        is_home=False,
        thanas=(
            "খুলনা সদর", "সোনাডাঙ্গা", "খান জাহান আলী", "কয়রা", "পাইকগাছা", "রূপসা",
            "তেরখাদা", "বটিয়াঘাটা", "দাকোপ", "ডুমুরিয়া", "ফকিরহাট", "মোল্লাহাট",
        ),
    ),
    DeliveryRegion(
        name="Barishal",
        label_bn="বরিশাল",
        is_home=False,
        thanas=(
            "বরিশাল সদর", "আগৈলঝাড়া", "বাবুগঞ্জ", "বাকেরগঞ্জ", "বানারীপাড়া", "গৌরনদী",
            "হিজলা", "মেহেন্দিগঞ্জ", "মুলাদী", "উজিরপুর", "ভোলা", "চরফ্যাশন",
        ),
    ),
    DeliveryRegion(
        name="Rangpur",
        label_bn="রংপুর",
        is_home=False,
        thanas=(
            "রংপুর সদর", "বদরগঞ্জ", "গঙ্গাচড়া", "কাউনিয়া", "মিঠাপুকুর", "পীরগঞ্জ",
            "পীরগাছা", "তারাগঞ্জ", "কুড়িগ্রাম", "ভুরুঙ্গামারী", "চিলমারী", "রাজারহাট",
        ),
    ),
    DeliveryRegion(
        name="Mymensingh",
        label_bn="ময়মনসিংহ",
        is_home=False,
        thanas=(
            "ময়মনসিংহ সদর", "ভালুকা", "ত্রিশাল", "মুক্তাগাছা", "নান্দাইল", "তারাকান্দা",
            "গৌরীপুর", "গফরগাঁও", "ঈশ্বরগঞ্জ", "হালুয়াঘাট", "ফুলবাড়ীয়া", "ধোবাউড়া",
        ),
    ),
)

HOME_REGION = next(region for region in REGIONS if region.is_home)

_LOOKUP = {}
for _region in REGIONS:
    _LOOKUP[_region.name.lower()] = _region
    _LOOKUP[_region.label_bn] = _region


def find_region(district) -> DeliveryRegion | None:
    """Resolve a district by English name (any case) or Bangla label.

    Returns ``None`` for unknown or unselected districts.
    """
    if isinstance(district, DeliveryRegion):
        return district
    if not district or not isinstance(district, str):
        return None
    key = district.strip()
    return _LOOKUP.get(key.lower()) or _LOOKUP.get(key)
