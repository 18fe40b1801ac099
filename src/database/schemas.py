# Document paths
def gig_tester_path(gig_id: str, tester_id: str) -> str:
    return f"gigs/{gig_id}/testers/{tester_id}"

def testers_collection(gig_id: str) -> str:
    return f"gigs/{gig_id}/testers"

def days_collection(gig_id: str, tester_id: str) -> str:
    return f"{gig_tester_path(gig_id, tester_id)}/days"

def day_path(gig_id: str, tester_id: str, date_key: str) -> str:
    return f"{days_collection(gig_id, tester_id)}/{date_key}"

def device_path(device_id: str) -> str:
    return f"devices/{device_id}"

def install_path(install_id: str) -> str:
    return f"installs/{install_id}"

def claim_code_path(code: str) -> str:
    return f"claimCodes/{code}"
