"""
Sentinel Knowledge Base - Common Move vulnerability patterns
Derived from MoveBit, OtterSec and Zellic audit reports and embedded into the
analysis prompt as few-shot context.
"""

from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class VulnerabilityPattern:
    type: str
    description: str
    bad_code: str
    good_code: str
    explanation: str


SEVERITY_LEVELS = ("Critical", "High", "Medium", "Low")

VULNERABILITY_TYPES = (
    "Capability Leak",
    "Shared Object Issues",
    "Object Wrapping Bugs",
    "Transfer Policy Violations",
    "Witness Pattern Misuse",
    "Access Control Flaws",
    "Timestamp Manipulation",
    "Integer Overflow/Underflow",
)

# Areas the model is told to review, in prompt order
REVIEW_FOCUS = ("defaults", "capabilities", "shared objects", "transfer rules", "upgrades", "arithmetic")

KNOWLEDGE_BASE: List[VulnerabilityPattern] = [
    VulnerabilityPattern(
        type="Privilege Escalation / Capability Leak",
        description=(
            "Exposing a privileged Capability (e.g., AdminCap, MintCap) in a public function "
            "or failing to check it properly."
        ),
        bad_code="""
public fun withdraw(admin_cap: &AdminCap, vault: &mut Vault, amount: u64) {
    // Error: a MintCap stored in a shared object lets anyone borrow a mutable reference to it.
}""",
        good_code="""
public fun withdraw(_: &AdminCap, vault: &mut Vault, amount: u64) {
    // Checks are implicit by requiring the AdminCap reference.
    // Ensure AdminCap is an Owned object, NOT Shared.
}""",
        explanation=(
            "Capabilities in Move design the permission system. If a Capability object is made "
            "Shared or Frozen, it becomes accessible to everyone, effectively destroying the "
            "permission check."
        ),
    ),
    VulnerabilityPattern(
        type="Witness Pattern Misuse",
        description=(
            "Using a struct that has 'drop' ability as a one-time witness, or failing to inspect "
            "the module publisher properly."
        ),
        bad_code="""
struct MyWitness has drop {} // Vulnerable: has 'drop', so anyone can construct it.

public fun init_token(witness: MyWitness, ctx: &mut TxContext) {
    // Logic that expects 'witness' to prove this is the original creator
}""",
        good_code="""
struct MY_WITNESS has drop {}

// The One-Time Witness must match the module name (uppercase)
// and be the first argument of init.
fun init(witness: MY_WITNESS, ctx: &mut TxContext) {
    // Compiler enforces OTW safety here.
}""",
        explanation=(
            "A One-Time Witness (OTW) guarantees a function is called only once at module "
            "publication. If a regular struct (that can be created by anyone) is used instead, "
            "the security guarantee fails."
        ),
    ),
    VulnerabilityPattern(
        type="Coin Siphoning / Rounding Error",
        description=(
            "Integer division rounding down to zero, or creating empty coin objects that clog "
            "storage, or losing dust."
        ),
        bad_code="""
public fun split_and_transfer(coin: &mut Coin<SUI>, amount: u64, recipient: address, ctx: &mut TxContext) {
    let fee = amount * 1 / 100; // 1% fee
    // If amount < 100, fee is 0.
}""",
        good_code="""
public fun split_and_transfer(coin: &mut Coin<SUI>, amount: u64, recipient: address, ctx: &mut TxContext) {
    let fee = math::mul_div_up(amount, 1, 100); // round up so the protocol gets paid
}""",
        explanation=(
            "In DeFi, integer math truncates decimals. Always consider the direction of rounding. "
            "For fees, round UP (favor the protocol). For user payouts, round DOWN (favor the "
            "vault safety)."
        ),
    ),
    VulnerabilityPattern(
        type="Shared Object Race Condition",
        description=(
            "Assuming a shared object state remains constant between transaction steps or relying "
            "on wall-clock time in a way that can be manipulated."
        ),
        bad_code="""
// Relying on a precise timestamp for randomness
let time = tx_context::epoch_timestamp_ms(ctx);
if (time % 2 == 0) { // Predictable, manipulable by the validator
    winner = sender;
}""",
        good_code="""
// Use a verifiable randomness source such as sui::random, or a commit-reveal scheme.
""",
        explanation=(
            "Validators control timestamps to a degree. Logic strictly dependent on granular "
            "timestamps for critical outcome determination (like gambling) is vulnerable to "
            "validator manipulation."
        ),
    ),
]
