from __future__ import annotations

import os
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional


class CmdError(Exception):
    pass


def run(cmd: List[str], cwd: Optional[str]) -> str:
    """Execute a command, stream both pipes, and return ONLY stdout text.

    Important: Some callers JSON-parse the return; never mix stderr into it.
    """
    import threading

    print(f"Running: {' '.join(cmd)}")
    try:
        proc = subprocess.Popen(
            cmd,
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            bufsize=1,
        )
    except FileNotFoundError as ex:
        raise CmdError(f"Executable not found: {cmd[0]}") from ex

    stdout_buf: list[str] = []

    def pump(pipe, tag: str) -> None:
        try:
            for line in iter(pipe.readline, ""):
                line = line.rstrip()
                if not line:
                    continue
                # Echo to console
                print(line, flush=True)
                if tag == "stdout":
                    stdout_buf.append(line)
        finally:
            pipe.close()

    t_out = threading.Thread(target=pump, args=(proc.stdout, "stdout"), daemon=True)
    t_err = threading.Thread(target=pump, args=(proc.stderr, "stderr"), daemon=True)
    t_out.start()
    t_err.start()
    rc = proc.wait()
    t_out.join()
    t_err.join()

    out_text = "\n".join(stdout_buf).strip()
    if rc != 0:
        raise CmdError(f"Command failed ({rc}): {' '.join(cmd)}\nSTDOUT:\n{out_text}")
    return out_text


def _resolve_az_exe() -> str:
    # On Windows the CLI ships as az.cmd, which Popen will not find as "az"
    if os.name == "nt":
        return shutil.which("az.cmd") or shutil.which("az") or "az.cmd"
    return shutil.which("az") or "az"


def az(args: List[str]) -> str:
    return run([_resolve_az_exe(), *args], cwd=None)


def cdktf(project_dir: Path, args: List[str]) -> str:
    return run(["cdktf", *args], cwd=str(project_dir))


def aks_status(resource_group: str, cluster_name: str) -> str:
    return az(
        [
            "aks",
            "show",
            "-g",
            resource_group,
            "-n",
            cluster_name,
            "--query",
            "{name:name, powerState:powerState.code, provisioningState:provisioningState, kubernetesVersion:kubernetesVersion}",
            "-o",
            "json",
        ]
    )


def app_gateway_status(resource_group: str, gateway_name: str) -> str:
    return az(
        [
            "network",
            "application-gateway",
            "show",
            "-g",
            resource_group,
            "-n",
            gateway_name,
            "--query",
            "{name:name, operationalState:operationalState, provisioningState:provisioningState, sku:sku.name}",
            "-o",
            "json",
        ]
    )


def app_gateway_backend_health(resource_group: str, gateway_name: str) -> str:
    return az(
        [
            "network",
            "application-gateway",
            "show-backend-health",
            "-g",
            resource_group,
            "-n",
            gateway_name,
            "--query",
            "backendAddressPools[].backendHttpSettingsCollection[].servers[].{address:address, health:health}",
            "-o",
            "json",
        ]
    )
