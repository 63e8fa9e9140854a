from .web3_evm_chain_gateway import Web3EvmChainGateway, Web3EvmChainGatewayConfig

__all__ = [
    "Web3EvmChainGateway",
    "Web3EvmChainGatewayConfig",
]
