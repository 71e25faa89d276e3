import pulumi_kubernetes as k8s
from pulumi_command.remote import Command, CommandArgs, ConnectionArgs

from ..config.load import read_secret_file
from ..config.models import KubernetesSpec


def make_k8s_provider(spec: KubernetesSpec) -> k8s.Provider:
    """
    Kubernetes provider used to patch node labels.

    kubeconfigPath wins over k3sServerIp. With k3sServerIp the kubeconfig is
    read off the k3s server over SSH, its loopback address rewritten to the
    server IP. With neither set the provider uses the ambient kubeconfig
    (KUBECONFIG / ~/.kube/config).
    """
    if spec.kubeconfig_path:
        return k8s.Provider("k8s", kubeconfig=read_secret_file(spec.kubeconfig_path, "kubeconfigPath"))

    if not spec.k3s_server_ip:
        return k8s.Provider("k8s")

    if spec.ssh_private_key is None:
        raise ValueError("k3sServerIp needs sshPrivateKeyPath or sshPrivateKey")

    server_ip = spec.k3s_server_ip
    kubeconfig = Command(
        "k3s-kubeconfig",
        CommandArgs(
            connection=ConnectionArgs(host=server_ip, user=spec.ssh_user, private_key=spec.ssh_private_key),
            create=f'set -euo pipefail\nsudo sed "s/127.0.0.1/{server_ip}/" /etc/rancher/k3s/k3s.yaml',
            triggers=[server_ip],
        ),
    )
    return k8s.Provider("k8s", kubeconfig=kubeconfig.stdout)
