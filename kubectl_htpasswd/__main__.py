import sys
from .cli import build_parser

"""
kubectl-htpasswd: manage htpasswd users stored in a Kubernetes Secret using:
- kubernetes client for reading and writing the Secret
- cryptography for the legacy {SHA} digest
- Argparse CLI with subcommands
Features:
    list, set, delete, verify
Usage examples:
    python -m kubectl_htpasswd set --create basic-auth alice
    python -m kubectl_htpasswd set basic-auth bob
    python -m kubectl_htpasswd -n ingress list basic-auth
    python -m kubectl_htpasswd verify basic-auth alice
    python -m kubectl_htpasswd --key-name users delete basic-auth bob
"""

def main():
    parser = build_parser()
    args = parser.parse_args()
    try:
        args.func(args)
    except KeyboardInterrupt:
        print("\nAborted by user.")
        sys.exit(1)
    except EOFError:
        print("\nNo input available.")
        sys.exit(1)

if __name__ == "__main__":
    main()
