# proposal_verifier/backend/engine/guidance.py
from __future__ import annotations

import re
from typing import Dict, List, Optional


_TUPLE_RE = re.compile(r"^\s*\(.*\)\s*$", re.DOTALL)


def _candid_expr(value: str, default: str) -> str:
	text = (value or "").strip()
	if not text:
		return default
	return text if _TUPLE_RE.match(text) else f"({text})"


def didc_encode_command(candid_input: str) -> str:
	"""Command that prints the argument bytes as hex, ready to paste as hex input."""
	return f"didc encode '{_candid_expr(candid_input, '()')}' | tr -d '\\n'"


def hash_verify_commands(candid_input: str) -> Dict[str, str]:
	expr = _candid_expr(candid_input, "(null)")
	return {
		"macos": f"didc encode '{expr}' | xxd -r -p | shasum -a 256 | awk '{{print $1}}'",
		"linux": f"didc encode '{expr}' | xxd -r -p | sha256sum | awk '{{print $1}}'",
	}


def release_commands(urls: List[str], expected: Optional[str]) -> List[Dict[str, str]]:
	expect = expected or ""
	commands = []
	for idx, url in enumerate(urls, start=1):
		fname = f"update-img-{idx}.tar.zst"
		commands.append(
			{
				"url": url,
				"command": (
					f'curl -fsSL "{url}" -o {fname}\n'
					f"sha256sum {fname}  # Linux (expect {expect})\n"
					f"shasum -a 256 {fname}  # macOS (expect {expect})"
				),
			}
		)
	return commands


def rebuild_script(kind: str, repository: str, commit: Optional[str], artifact_path: Optional[str] = None) -> str:
	if not commit:
		return "# No commit found in the proposal summary; a reproducible rebuild needs one."
	clone = (
		f"git clone https://github.com/{repository}.git\n"
		f"cd {repository.split('/')[-1]}\n"
		f"git fetch --all\n"
		f"git checkout {commit}\n"
	)
	if kind == "IcOsVersionDeployment":
		return (
			clone
			+ "./ci/container/build-ic.sh -i\n"
			+ "sha256sum ./artifacts/icos/guestos/update-img.tar.zst"
		)
	if kind == "ProtocolCanisterManagement":
		target = artifact_path or "./artifacts/canisters/*.wasm.gz"
		return clone + "./ci/container/build-ic.sh -c\n" + f"sha256sum {target}"
	return clone + "# Rebuild the artifact named in the proposal and hash it with sha256sum."
