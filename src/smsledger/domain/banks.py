"""Bank profile registry.

Every institution is one row of configuration: a name, the sender IDs its
alerts arrive from, and optionally a few override patterns for fields the
generic rules get wrong. Lookup is an exact, case-sensitive match on the
sender ID; the first profile in table order that lists the sender wins.
"""

import re
from typing import Iterable, Optional

from smsledger.domain.entities import BankProfile, ExtractionRuleSet

# ICICI card alerts: "INR 1,500.00 spent using ICICI Bank Card XX1234 on 03-Jan-26 on AMAZON. Avl Limit: INR 50,000.00"
# "Avl Limit" is the remaining credit limit, not a balance, so it is left unset
ICICI_RULES = ExtractionRuleSet(
    merchant=re.compile(
        r"\bon\s+\d{1,2}-[A-Za-z]{3}-\d{2,4}\s+(?:on|at)\s+([A-Za-z0-9&'*._ -]+?)(?:\.\s|\.?$|\s+Avl)",
        re.IGNORECASE,
    ),
)

# Axis UPI alerts: "INR 500.00 debited A/c no. XX1234 03-01-26 12:00:00 UPI/P2M/123456789012/SWIGGY Not you? ..."
AXIS_RULES = ExtractionRuleSet(
    reference=re.compile(r"\bUPI/P2[AM]/(\d+)/", re.IGNORECASE),
    merchant=re.compile(r"\bUPI/P2[AM]/\d+/([^/\n]+?)(?:/|\s+Not you|\.\s|\.?$)", re.IGNORECASE),
)


def _profile(name: str, display_name: str, sender_ids: Iterable[str], rules=None) -> BankProfile:
    return BankProfile(
        name=name,
        display_name=display_name,
        sender_ids=frozenset(sender_ids),
        rules=rules,
    )


BANK_PROFILES: tuple[BankProfile, ...] = (
    _profile("HDFC Bank", "HDFC", [
        "VM-HDFCBK", "AD-HDFCBK", "HDFCBK", "HDFCBank", "HDFCCC",
        "HDFC", "HDFCUPI", "VM-HDFCCC", "AD-HDFCCC", "HDFCMB",
    ]),
    _profile("State Bank of India", "SBI", [
        "VM-SBIINB", "AD-SBIBNK", "SBI", "SBIINB", "SBIPSG",
        "VM-SBICard", "AD-SBicrd", "SBIUPI", "SBMSMS", "VM-SBIATM",
    ]),
    _profile("ICICI Bank", "ICICI", [
        "VM-ICICIB", "BZ-ICICIB", "ICICIB", "iMobile", "ICICIC",
        "ICICICC", "ICICIPB", "ICIUPI", "AD-ICICIB", "VM-ICIPRU",
    ], rules=ICICI_RULES),
    _profile("Axis Bank", "Axis", [
        "VM-AXISBK", "AD-AXISBK", "AXISBK", "AxisBank", "AXISBNK",
        "AXISCRD", "AXISUPI", "VM-AXISCB", "AD-AXISCB", "AXISMB",
    ], rules=AXIS_RULES),
    _profile("Kotak Mahindra Bank", "Kotak", [
        "VK-KOTAKB", "AD-KOTAKB", "KOTAKB", "Kotak", "KOTAK",
        "KOTAKCC", "KOTAKUPI", "VK-KOTAKC", "AD-KOTAKC", "KOTAKMB",
    ]),
    _profile("Punjab National Bank", "PNB", [
        "VM-PNBSMS", "AD-PNBANK", "PNBSMS", "PNBANK", "PNB",
        "PNBUPI", "PNBMB", "PNBCC", "PNBATM", "AD-PNBCRD",
    ]),
    _profile("Bank of Baroda", "BoB", [
        "AD-BOBANK", "VM-BOBANK", "BOBANK", "BOBBNK", "BOB",
        "BOBUPI", "BOBMB", "BOBCC", "BOBATM", "AD-BOBCRD",
    ]),
    _profile("Canara Bank", "Canara", [
        "VM-CANBNK", "AD-CANARA", "CANBNK", "CANARA", "CANARABANK",
        "CANBNKUPI", "CANBNKMB", "CANBNKCC", "CANBNKATM", "AD-CANBNK",
    ]),
    _profile("Union Bank of India", "Union Bank", [
        "VM-UBIONL", "AD-UBIONL", "UBIONL", "UNIONBK", "UNIONBNK",
        "UBIUPI", "UBIMB", "UBICC", "UBIATM", "AD-UNIONB",
    ]),
    _profile("IDFC First Bank", "IDFC First", [
        "VM-IDFCFB", "AD-IDFCFB", "IDFCFB", "IDFCBNK", "IDFC",
        "IDFCUPI", "IDFCMB", "IDFCCC", "IDFCATM", "VM-IDFCCC",
    ]),
    _profile("IDBI Bank", "IDBI", [
        "VM-IDBIBK", "AD-IDBIBK", "IDBIBK", "IDBIBNK", "IDBI",
        "IDBIUPI", "IDBIMB", "IDBICC", "IDBIATM", "VM-IDBICC",
    ]),
    _profile("Indian Bank", "Indian Bank", [
        "VM-INBBNK", "AD-INBBNK", "INBBNK", "INDIANBK", "INDBNK",
        "INBUPI", "INBMB", "INBCC", "INBATM", "VM-INBCC",
    ]),
    # INDBNK is also claimed by Indian Bank above, which wins
    _profile("IndusInd Bank", "IndusInd", [
        "VM-ILOANS", "AD-INDBNK", "INDBNK", "IndusInd", "INDUSIND",
        "INDUSUPI", "INDUSMB", "INDUSCC", "INDUSATM", "VM-INDBNK",
    ]),
    _profile("Yes Bank", "Yes Bank", [
        "VM-YESBNK", "AD-YESBNK", "YESBNK", "YESBANK", "YES",
        "YESUPI", "YESMB", "YESCC", "YESATM", "VM-YESCC",
    ]),
    _profile("Federal Bank", "Federal Bank", [
        "VM-FEDBNK", "AD-FEDBNK", "FEDBNK", "FEDERALBK", "FEDERAL",
        "FEDUPI", "FEDMB", "FEDCC", "FEDATM", "VM-FEDCC",
    ]),
    _profile("Central Bank of India", "Central Bank", [
        "VM-CNTBNK", "AD-CNTBNK", "CNTBNK", "CENBNK", "CBINDIA",
        "CBIUPI", "CBIMB", "CBICC", "CBIATM", "VM-CBICC",
    ]),
    _profile("Bandhan Bank", "Bandhan Bank", [
        "VM-BANDHN", "AD-BANDHN", "BANDHN", "BANDHAN", "BANDHANBK",
        "BANDUPI", "BANDMB", "BANDCC", "BANDATM", "VM-BANDCC",
    ]),
    _profile("Karnataka Bank", "Karnataka Bank", [
        "VM-KTKBNK", "AD-KTKBNK", "KTKBNK", "KARBNK", "KTKBANK",
        "KTKUPI", "KTKMB", "KTKCC", "KTKATM", "VM-KTKCC",
    ]),
    _profile("RBL Bank", "RBL Bank", [
        "VM-RBLBNK", "AD-RBLBNK", "RBLBNK", "RBLBANK", "RBL",
        "RBLUPI", "RBLMB", "RBLCC", "RBLATM", "VM-RBLCC",
    ]),
    _profile("South Indian Bank", "South Indian Bank", [
        "VM-SIBSMS", "AD-SIBBNK", "SIBSMS", "SIBANK", "SIB",
        "SIBUPI", "SIBMB", "SIBCC", "SIBATM", "VM-SIBCC",
    ]),
    _profile("Paytm Payments Bank", "Paytm", [
        "VM-PAYTMB", "AD-PYTMWL", "PAYTMB", "PAYTM", "PaytmB",
        "Paytm", "PYTMWL", "VM-PAYTM", "AD-PAYTMB", "PAYTMUPI",
    ]),
    _profile("Airtel Payments Bank", "Airtel", [
        "VM-AIRTEL", "AD-AIRTPB", "AIRTPB", "AIRTEL", "AIRTELB",
        "AIRTELPB", "AIRTELUPI", "AIRTELMB", "VM-AIRTPB", "AD-AIRTEL",
    ]),
    _profile("India Post Payments Bank", "IPPB", [
        "VM-IPPBSM", "AD-IPPBSM", "IPPBSM", "IPPB", "POSTBK",
        "IPPBUPI", "IPPBMB", "INDIAPOST", "POSTBANK", "VM-IPPB",
    ]),
    _profile("Jio Payments Bank", "Jio", [
        "VM-JIOMNY", "AD-JIOMNY", "JIOMNY", "JIOPAY", "JioMoney",
        "JIOUPI", "JIOMB", "VM-JIOPAY", "AD-JIOPAY", "JIOBK",
    ]),
    _profile("Fino Payments Bank", "Fino", [
        "VM-FINOPB", "AD-FINOPB", "FINOPB", "FINO", "FINOBANK",
        "FINOUPI", "FINOMB", "VM-FINO", "AD-FINO", "FINOPAY",
    ]),
    _profile("Fi Money", "Fi", [
        "FIMONEY", "VM-FIBNK", "AD-FIBNK", "FI", "FIUPI",
        "FIMB", "FICARD", "VM-FIMONY", "AD-FIMONY", "FIPAY",
    ]),
    _profile("Jupiter", "Jupiter", [
        "JUPITER", "VM-JUPBK", "AD-JUPBK", "JUPITERBK", "JUPUPI",
        "JUPMB", "JUPCARD", "VM-JUPTER", "AD-JUPTER", "JUPITERPAY",
    ]),
    _profile("Niyo", "Niyo", [
        "NIYO", "VM-NIYO", "AD-NIYO", "NIYOBNK", "NIYOUPI",
        "NIYOMB", "NIYOCARD", "NIYOPAY", "VM-NIYOGL", "NIYOEQ",
    ]),
    _profile("CRED", "CRED", [
        "CRED", "VM-CRED", "AD-CRED", "CREDPAY", "CREDAPP",
        "VM-CREDP", "AD-CREDP", "CREDCLUB", "CREDMINT", "CREDPMT",
    ]),
    _profile("Slice", "Slice", [
        "SLICE", "VM-SLICE", "AD-SLICE", "SLICECC", "SLICEPAY",
        "SLICECARD", "VM-SLICEC", "AD-SLICEC", "SLICEUPI", "SLICEMB",
    ]),
    _profile("OneCard", "OneCard", [
        "ONECARD", "VM-ONECD", "AD-ONECD", "ONECRD", "ONECARDCC",
        "ONECARDPAY", "VM-ONECRD", "AD-ONECRD", "ONECARDUPI", "ONECARDMB",
    ]),
)


class BankRegistry:
    """Resolve message senders to bank profiles."""

    def __init__(self, profiles: Iterable[BankProfile] = BANK_PROFILES):
        """Initialize the registry.

        Args:
            profiles: Profiles in lookup order; the first one listing a sender wins
        """
        self._profiles = tuple(profiles)

    def resolve(self, sender: str) -> Optional[BankProfile]:
        """Return the profile that lists ``sender``, or None for unknown senders."""
        for profile in self._profiles:
            if sender in profile.sender_ids:
                return profile
        return None

    def profiles(self) -> list[BankProfile]:
        """All profiles in lookup order."""
        return list(self._profiles)
