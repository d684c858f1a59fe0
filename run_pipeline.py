"""
Pipeline Runner
===============

Builds a contract description, compiles it and (optionally) deploys it.
Edit CONTRACT_SPEC below, or pass --erc20 for the ready-made token.

The deployer key is read from the DEPLOYER_PRIVATE_KEY environment
variable (or .env) and is never printed or written to disk.
"""

import os
import sys

from contract_builder import ContractDescription, presets
from contract_pipeline import SandboxSession, load_settings
from contract_pipeline.utils import ensure_dir, timestamp, write_json, write_text


# ============================================================================
# CONFIGURATION - Edit these values to customize the pipeline
# ============================================================================

# Contract description in the builder's JSON shape
CONTRACT_SPEC = {
    "name": "Token",
    "inheritsFrom": [],
    "variables": [
        {"name": "supply", "type": "uint256", "visibility": "public", "defaultValue": "1000"},
    ],
    "functions": [
        {
            "name": "send",
            "inputs": [{"name": "to", "type": "address"}, {"name": "amount", "type": "uint256"}],
            "outputs": [],
            "visibility": "public",
            "stateMutability": "",
            "body": "require(amount <= supply);\nsupply -= amount;\nemit Transfer(msg.sender, to, amount);",
        },
    ],
    "events": [
        {
            "name": "Transfer",
            "parameters": [
                {"name": "from", "type": "address", "indexed": True},
                {"name": "to", "type": "address", "indexed": True},
                {"name": "amount", "type": "uint256", "indexed": False},
            ],
        },
    ],
}

PIPELINE_CONFIG = {
    "deploy": False,            # Set to True to deploy after compiling
    "network": "local",         # sepolia | holesky | local
    "constructor_args": "[]",   # JSON array
    "verbose": False,           # Set to True for [DEBUG] output
}

# ============================================================================


def run_full_pipeline(description: ContractDescription, options: dict):
    """
    Preview → compile → (deploy), saving outputs under pipeline_outputs/

    Args:
        description: Contract to build
        options: PIPELINE_CONFIG-shaped dictionary
    """
    print("\n" + "=" * 80)
    print("RUNNING PIPELINE (Preview → Compile" + (" → Deploy)" if options.get("deploy") else ")"))
    print("=" * 80)

    outdir = ensure_dir(f"pipeline_outputs/{timestamp()}")
    session = SandboxSession(description, settings=load_settings(), verbose=options.get("verbose", False))

    # ------------------------------------------------------------------
    # Preview
    # ------------------------------------------------------------------
    source = session.preview()
    name = description.name
    sol_path = f"{outdir}/{name}.sol"
    write_text(sol_path, source)

    lines = source.split("\n")
    print(f"\n📄 Contract Preview (first 20 lines):")
    for i, line in enumerate(lines[:20], 1):
        print(f"   {i:3d} | {line}")
    if len(lines) > 20:
        print(f"   ... ({len(lines) - 20} more lines)")

    # ------------------------------------------------------------------
    # Compile
    # ------------------------------------------------------------------
    compile_result = session.compile()
    if not compile_result.success:
        write_json(f"{outdir}/compile_error.json", compile_result.to_dict())
        return None

    write_json(f"{outdir}/abi.json", compile_result.artifact.abi)
    write_json(f"{outdir}/metadata.json", {
        "artifact": compile_result.artifact.to_dict(),
        "warnings": compile_result.warnings,
        "description": description.to_dict(),
    })

    print(f"\n📦 Outputs saved:")
    print(f"   • Solidity: {sol_path}")
    print(f"   • ABI: {outdir}/abi.json")
    print(f"   • Metadata: {outdir}/metadata.json")

    # ------------------------------------------------------------------
    # Deploy
    # ------------------------------------------------------------------
    deploy_result = None
    if options.get("deploy"):
        signing_key = os.getenv("DEPLOYER_PRIVATE_KEY", "")
        if not signing_key:
            print("❌ DEPLOYER_PRIVATE_KEY is not set; skipping deploy")
        else:
            deploy_result = session.deploy(
                options.get("network", "local"),
                signing_key,
                options.get("constructor_args", "[]"),
            )
            write_json(f"{outdir}/deployment.json", deploy_result.to_dict())

    print("\n" + "=" * 80)
    print("✅ PIPELINE COMPLETE")
    print("=" * 80)
    print(f"\n📁 All outputs saved in: {outdir}")

    return {
        "output_dir": outdir,
        "compile_result": compile_result,
        "deploy_result": deploy_result,
    }


def main():
    """Main entry point"""
    import argparse

    parser = argparse.ArgumentParser(
        description="Build, compile and optionally deploy a contract",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Compile CONTRACT_SPEC from this file
  python run_pipeline.py

  # Compile and deploy an ERC20 to a local node
  OPENZEPPELIN_PATH=./node_modules python run_pipeline.py --erc20 --deploy --network local
        """
    )
    parser.add_argument("--erc20", action="store_true", help="Use the ERC20 preset instead of CONTRACT_SPEC")
    parser.add_argument("--deploy", action="store_true", help="Deploy after compiling")
    parser.add_argument("--network", type=str, help="Network label (overrides PIPELINE_CONFIG)")
    parser.add_argument("--args", type=str, help="Constructor arguments as a JSON array")
    parser.add_argument("--verbose", "-v", action="store_true", help="Show [DEBUG] output")

    args = parser.parse_args()

    options = PIPELINE_CONFIG.copy()
    if args.deploy:
        options["deploy"] = True
    if args.network:
        options["network"] = args.network
    if args.args:
        options["constructor_args"] = args.args
    if args.verbose:
        options["verbose"] = True

    try:
        if args.erc20:
            description = presets.erc20_token("MyToken", "My Token", "MTK", 1000000)
        else:
            description = ContractDescription.from_dict(CONTRACT_SPEC)

        result = run_full_pipeline(description, options)

        if result is None:
            print("\n❌ Pipeline failed. Check errors above.")
            sys.exit(1)
        deploy_result = result.get("deploy_result")
        if deploy_result is not None and not deploy_result.success:
            sys.exit(1)

    except KeyboardInterrupt:
        print("\n\n⚠️  Pipeline cancelled by user")
        sys.exit(0)
    except ValueError as e:
        print(f"\n❌ Invalid configuration: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
