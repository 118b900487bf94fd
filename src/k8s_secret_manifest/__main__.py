from k8s_secret_manifest.cli import main

main()
